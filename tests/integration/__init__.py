"""
Integration tests for the LLM Fallback Gateway.

Test components together without real upstreams:
- API endpoints (FastAPI TestClient) driving the real orchestrator
  against an httpx.MockTransport
"""
