"""
Auto-categorization engine for uploaded images, PDFs, JSON documents and audio.

Domain Structure:
- models/      - Patterns, extracted content, match candidates and results
- matching/    - Per-modality matchers, image features and evidence aggregation
- extraction/  - Content extraction (PDF text, OCR, JSON, transcripts)
- gateway/     - HTTP mirror of the engine contract

Shared Utilities:
- config.py / settings.py - Configuration and matching thresholds
- logging_config.py       - Centralized logging with correlation ids
- engine.py               - CategorizationEngine (file type -> matcher -> aggregate)
- service.py              - File path -> extraction -> corpus -> engine
"""

__version__ = "0.1.0"
