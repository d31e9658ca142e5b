"""Query execution over the in-memory dataset.

Reports are written as SQL and run on DuckDB against the session's pandas
frames. DuckDB scans the frames in place, so loading a table into the engine
never copies or mutates it.
"""
