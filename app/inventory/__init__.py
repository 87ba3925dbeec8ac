"""
Book Cover Inventory Backend Application.

A FastAPI service that reads bibliographic metadata from photographs
of book covers using AI (OpenAI vision models) and keeps the confirmed
records in a searchable inventory.
"""

__version__ = "1.0.0"
