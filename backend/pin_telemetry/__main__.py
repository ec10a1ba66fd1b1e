"""Run the API with uvicorn: python -m pin_telemetry"""

import uvicorn

from pin_telemetry.main import Config


def main():
    uvicorn.run(
        "pin_telemetry.main:app",
        host=Config.HOST,
        port=Config.PORT,
        log_level=Config.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
