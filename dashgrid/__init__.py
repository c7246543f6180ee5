"""dashgrid: dashboard grid layout engine and service.

Packages:
  layout   pure layout engine (placement, cascading resizes, validation)
  web      FastAPI service that commits engine results per session
"""
