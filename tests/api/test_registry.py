import pytest

from csii.api.base_controller import Controller
from csii.api.registry import BUILTIN_CONTROLLERS, create_controller, list_controllers
from csii.core.parameters import StaticParameters
from csii.core.policy import DosingPolicy


def test_create_builtin_controllers():
    iob = create_controller("csii-iob")
    table = create_controller("csii-threshold", parameters=StaticParameters({"inc_basal": 0.1}))

    assert isinstance(iob, Controller)
    assert iob.policy is DosingPolicy.IOB
    assert table.policy is DosingPolicy.THRESHOLD


def test_unknown_controller_raises():
    with pytest.raises(ValueError, match="Unknown controller"):
        create_controller("pid")


def test_list_controllers_includes_builtins():
    listings = {listing.name: listing for listing in list_controllers()}

    for name in BUILTIN_CONTROLLERS:
        assert listings[name].source == "builtin"
        assert listings[name].status == "available"
        assert listings[name].profile.id == "CSII"
