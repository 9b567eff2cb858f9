"""
Slot availability and booking engine.

hours     - which weekdays a provider operates, and when
breaks    - per-weekday break intervals owned by a provider
slots     - slot generation and availability annotation (pure)
booking   - availability payloads, the booking transaction, rescheduling
lifecycle - appointment status changes and cancellation
providers - provider lookups, ownership checks and the booking row lock
timeutils - "HH:MM" parsing, weekday numbering and the provider-local clock
"""
