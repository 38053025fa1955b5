"""Data loading, normalization, statement parsing, and the in-memory store."""
from .loader import build_join_index, ingest_load_records, read_csv_text
from .normalize import extract_load_id, parse_amount, parse_percent
from .schemas import DateRange, LoadRecord, QuarterSummary
from .statements import parse_statement, resolve_date_range
from .store import DataStore
