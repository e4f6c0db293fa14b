"""KV store adapters.

The limiter talks to its store through a two-method interface (``get`` and
``put``), so the same limiter runs against process memory in development,
Redis, or Cloudflare Workers KV.
"""
