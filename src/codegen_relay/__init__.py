"""
Codegen Relay package.

Provides:
- Retrying HTTP client for OpenAI-compatible chat-completion upstreams
- Two-stage chain: prompt refinement, then code generation
- FastAPI endpoint (/generate) and a one-shot CLI around the chain
"""
