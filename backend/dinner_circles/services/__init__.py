"""
Services Layer

Matching business logic:
- Accepts domain inputs (IDs, sessions, configs)
- Returns domain outputs (value types from matching_types)
- Does NOT depend on HTTP request/response objects
- Owns the transaction boundary; repositories only flush
"""
