# This file marks the services package for account, catalog, and booking logic.
# Routers depend on these service classes instead of opening sessions themselves.
