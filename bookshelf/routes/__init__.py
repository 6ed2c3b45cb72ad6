"""
Bookshelf — API Routes Package
===============================

Route Inventory:
    - books.py:   GET/POST /books, GET/PUT/DELETE /books/{id}
    - health.py:  GET /health

Routes stay thin: take parsed input, call the repository, hand the result
to the response encoder.
"""
