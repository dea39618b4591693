"""
Unit tests for claim token generation.
"""

import re
import threading

from src.queue.tokens import TokenGenerator, get_token_generator


class TestTokenGenerator:
    """Tests for TokenGenerator."""

    def test_token_format(self):
        """Test tokens are 40-character lowercase hex digests."""
        token = TokenGenerator().generate()

        assert re.fullmatch(r"[0-9a-f]{40}", token)

    def test_repeated_calls_differ(self):
        """Test tokens differ even when generated back to back."""
        generator = TokenGenerator()

        tokens = {generator.generate() for _ in range(10_000)}

        assert len(tokens) == 10_000

    def test_generators_on_different_hosts_differ(self):
        """Test host identity is part of the token."""
        a = TokenGenerator(hostname="host-a")
        b = TokenGenerator(hostname="host-b")

        assert a.generate() != b.generate()

    def test_callable(self):
        """Test the generator can be called directly."""
        generator = TokenGenerator()

        assert len(generator()) == 40

    def test_unique_across_threads(self):
        """Test concurrent callers sharing a generator never collide."""
        generator = TokenGenerator()
        results: list[list[str]] = [[] for _ in range(8)]

        def produce(bucket: list[str]) -> None:
            for _ in range(1_000):
                bucket.append(generator.generate())

        threads = [threading.Thread(target=produce, args=(b,)) for b in results]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        all_tokens = [token for bucket in results for token in bucket]
        assert len(set(all_tokens)) == len(all_tokens) == 8_000

    def test_process_wide_instance(self):
        """Test the default generator is shared."""
        assert get_token_generator() is get_token_generator()
