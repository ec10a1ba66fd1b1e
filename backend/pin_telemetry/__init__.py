"""
Pin Telemetry Backend
=====================

This is the Python package for the ingestion API.

HOW IT'S ORGANIZED:
------------------
- models/    = Data structures (what does a device / a reading look like?)
- services/  = Workers (generate keys, register devices, save readings)
- routers/   = API endpoints (POST /auth and POST /data)
- storage.py = The MongoDB handle shared by the endpoints
- errors.py  = Turns exceptions into {"error": ...} responses
- main.py    = Puts it all together and starts the server
"""

__version__ = "1.0.0"
