from __future__ import annotations

import hashlib
from collections.abc import Iterable


def compute_signature(files: Iterable[tuple[str, bytes]]) -> str:
	"""Signature of an ordered bundle.

	Both the path sequence and each file's content feed the digest, so
	reordering, renaming or editing any source yields a new signature.
	"""
	hasher = hashlib.sha1()
	for path, content in files:
		encoded = path.encode("utf-8")
		hasher.update(len(encoded).to_bytes(4, "big"))
		hasher.update(encoded)
		hasher.update(len(content).to_bytes(8, "big"))
		hasher.update(content)
	return hasher.hexdigest()
