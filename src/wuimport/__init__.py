"""Import Weather Underground PWS history into InfluxDB.

Pipeline flow:
    iter_days -> fetcher.fetch_day -> Batch -> print_batch | upload_batch
"""

__version__ = "0.1.0"
