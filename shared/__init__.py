"""
shared – tiny helpers imported by every package
-----------------------------------------------
Modules
-------
config.py         → loads `.env` once per process, builds `Settings`
logging.py        → consistent JSON/stdout logger
constants.py      → Redis key templates, interval table, defaults
redis_client.py   → lazy Redis connection with bounded retry
utils.py          → time helpers that don’t belong elsewhere
"""
