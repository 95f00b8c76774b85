"""Output generation for Excel and CSV exports."""

from pos_pnl.output.csv_exporter import CSVExporter
from pos_pnl.output.excel_writer import ExcelWriter

__all__ = ["ExcelWriter", "CSVExporter"]
