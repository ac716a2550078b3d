# tenant_foundry/cli/__init__.py
