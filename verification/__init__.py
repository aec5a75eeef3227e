"""
Identity Verification Pipeline

This package contains the verification decision pipeline for a document
photo and a live selfie:
- Upload image checks
- Document Reader engine call and response normalization
- Document validation rules
- Face matching against the document portrait
- Final verdict composition
"""

__version__ = "1.0.0"
