"""
Ameliyat Listesi: surgical case list scheduler for the urology clinic.
Calendar aggregation, room assignment, filtering and spreadsheet import over
a snapshot-pushing case store.
"""

__version__ = "1.0.0"
