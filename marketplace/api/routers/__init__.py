# This file marks the routers package for API route modules.
# Route modules are grouped by resource and mounted under the versioned prefix by the app factory.
