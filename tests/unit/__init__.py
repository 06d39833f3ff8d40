"""
Unit tests for the LLM Fallback Gateway.

Test individual components in isolation:
- Provider families (request shaping, text extraction, registry)
- Attempt executor (status classification, timeouts, malformed bodies)
- Retry controller (attempt bounds, backoff delays)
- Normalizer and orchestrator (sequential and race fallback)
- API request/response models and dependencies
"""
