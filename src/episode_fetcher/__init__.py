"""
episode_fetcher — declarative, Future-based loading of episode resources.

Describes each remote value as a Resource (address + parse function),
loads it through a Webservice backed by an httpx transport, and chains
dependent fetches (episode list → episode details) with Future.flat_map.

Built on the railfuture Result/Future library for explicit, composable,
functional error handling across asynchronous steps.
"""

__version__ = "0.1.0"
