# Utilities package init
"""
AEDCheck Backend — Small Deterministic Utilities
=================================================

What:  Pure helpers shared by services: distance, string/phone
       normalization and fuzzy-match tier classification.
How:   No I/O and no settings; every function is safe to call anywhere.

Module Inventory:
    - geo.py:       haversine_km(), to_float()
    - text.py:      normalize_string(), normalize_phone(), normalize_whitespace()
    - matching.py:  score_institution_match(), classify_match(), confidence_label()
"""
