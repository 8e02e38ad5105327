"""
AI dish search layer.

Responsibilities:
- Project the restaurant catalog into flat dish records for the engine.
- Call the Groq-backed multimodal engine with text or image queries.
- Stage uploaded images to short-lived files and always remove them.
- Reconcile dish-level matches back into restaurant-shaped results.
"""
