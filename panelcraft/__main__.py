"""Run the Panelcraft API server: ``python -m panelcraft``."""

from panelcraft.api.main import start_server

if __name__ == "__main__":
    start_server()
