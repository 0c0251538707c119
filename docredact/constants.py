from __future__ import annotations

# Single source of truth for static constants and versions.

# Confidence quantization steps for OCR extraction.
CONFIDENCE_STEPS = [0.0, 0.2, 0.4, 0.6, 0.8, 1.0]

# Extraction tier method names, in fallback order.
METHOD_DIRECT_PARSE = "direct-parse"
METHOD_VISION_OCR = "vision-ocr"
METHOD_LAYOUT_PARSE = "layout-parse"
METHOD_FALLBACK_ENDPOINT = "fallback-endpoint"

# Bundled document type catalog used when ELEMENT_CATALOG_PATH is unset.
DEFAULT_ELEMENT_CATALOG = "data/document_types.json"
