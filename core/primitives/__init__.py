"""
HotelSphere Core Primitives — Front-Desk Building Blocks
==========================================================
Primitives are the shared, engine-agnostic entities that the local
store persists, the replica mirrors and the engines read. They are:

- Pure Python (no Django dependency)
- Immutable (frozen dataclasses)
- Deterministic (same input → same output)
- Money in integer minor units

Primitives:
    hotel — Room, Guest, Booking, Charge, Payment, GroupProfile,
            Transaction and their status enums
"""
