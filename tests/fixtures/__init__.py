"""
Test fixtures for the LLM Fallback Gateway.

Contains recorded-shape provider payloads:
- chat_completion.json: OpenAI-compatible chat/completions answer (Groq, Cerebras)
- generate_content.json: Gemini generateContent answer
- upstream.py: ScriptedUpstream, a per-host httpx.MockTransport script
"""
