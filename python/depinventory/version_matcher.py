"""Matching of declared dependency specifiers against installed versions."""

import logging

import nodesemver

logger = logging.getLogger(__name__)


class VersionMatcher:
    """Decides whether an installed version satisfies a declared specifier."""

    @classmethod
    def matches(cls, candidate_version: str, specifier: str, exact_only: bool = False) -> bool:
        """
        Check a candidate version against a dependency specifier.

        Byte-equal strings always match, even when neither is valid semver
        (local paths, tarball URLs and workspace versions are declared this way).
        Otherwise the specifier is evaluated as an npm range unless exact_only is set.

        Args:
            candidate_version: Version string of an installed package
            specifier: Version or range declared by the dependent package
            exact_only: Skip range evaluation and accept exact matches only

        Returns:
            True if the candidate satisfies the specifier
        """
        if candidate_version == specifier:
            return True

        if exact_only:
            return False

        return cls.satisfies(candidate_version, specifier)

    @staticmethod
    def satisfies(version: str, range_spec: str) -> bool:
        """Evaluate an npm range, treating unparseable input as no match."""
        if not isinstance(version, str) or not isinstance(range_spec, str):
            return False

        try:
            return bool(nodesemver.satisfies(version, range_spec))
        except ValueError as e:
            logger.debug(f"Cannot evaluate {version!r} against {range_spec!r}: {e}")
            return False
