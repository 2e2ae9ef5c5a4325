"""Number Scanner.

Extracts ranked numeric values (amounts, percentages, temperatures, and
plain numbers) from OCR text of captured images, with a Tesseract-backed
scanner, a REST API, and a batch CLI around the extraction engine.
"""
