"""Services package: query routing and search-index plumbing lives here.

Files:
  query_manager.py  - QueryManager: driver registry + capability fallback
  typesense_client.py  - async Typesense REST client (httpx)
  search_index.py  - imports / flushes searchable models into Typesense

Rule: services call drivers and repositories, repositories call the DB.
      No FastAPI imports in services.
"""
