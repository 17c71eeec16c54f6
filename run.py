"""
Uvicorn launcher for the Item Vault API.

Equivalent to the ``item-vault`` console script; kept for environments that
prefer `python run.py`. Reads the port from Settings (env/.env, default 3000).
"""

from item_vault.api.main import serve

if __name__ == "__main__":
    serve()
