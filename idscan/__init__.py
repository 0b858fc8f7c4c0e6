"""Aadhaar and Voter ID document scanner.

A staged OCR pipeline that classifies a photographed Indian identity
card, recognizes tuned regions of it with Tesseract, and extracts
name, date of birth, gender, and card numbers with layered rules.
"""

__version__ = "1.0.0"
