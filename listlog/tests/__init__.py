"""
Test suite for listlog.

Focus areas:
- Replay determinism and kernel edge cases
- Domain replay extensions
- Wire codec for flat events with nested blobs
- Store sync behavior under network failure
"""
