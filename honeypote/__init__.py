"""
Honey-Pote: Conversational Scam Honeypot
========================================

Modules:
    - main.py      : FastAPI application and request pipeline
    - agent.py     : keyword-categorized "confused victim" reply composer
    - extractor.py : named regex patterns for scam indicators
    - callback.py  : finalization gate and background final-result delivery
    - memory.py    : thread-safe store of finalized session ids
    - audit.py     : append-only JSON event log
    - sanitizer.py : input normalization
    - models.py    : Pydantic request/response schemas
    - config.py    : environment configuration
"""
