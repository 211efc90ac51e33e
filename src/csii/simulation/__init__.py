from .runner import RESULT_COLUMNS, load_readings_csv, run_controller, summarize_run

__all__ = ["RESULT_COLUMNS", "load_readings_csv", "run_controller", "summarize_run"]
