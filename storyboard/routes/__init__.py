"""
Storyboard Backend — API Routes Package
========================================

Route Inventory:
    - parts.py:   GET    /api/parts                (public, ordered list)
                  GET    /api/parts/{id}           (public)
                  POST   /api/parts                (auth)
                  PUT    /api/parts/reorder        (auth, atomic batch)
                  PUT    /api/parts/{id}           (auth)
                  DELETE /api/parts/{id}           (auth, removes the image)
    - upload.py:  POST   /api/upload               (auth, multipart `image`)
    - auth.py:    POST   /api/auth/login
                  POST   /api/auth/logout
                  GET    /api/auth/status
    - pages.py:   GET    /                         (public HTML view)
    - health.py:  GET    /health

Routes stay thin: parse the request, call a service, shape the response.
Protected routes declare `Depends(require_auth)`, which runs before the
body is handled.
"""
