"""Record store for prtracker: schema, models and the SQLite backend."""
