#!/usr/bin/env python3
"""
KUBEBIND MANIFEST I/O - Comment-Preserving Round-Trip
-----------------------------------------------------
Loads multi-document Kubernetes manifests into ruamel.yaml CommentedMaps
and dumps them back with standard Kubernetes indentation.
"""

import io
from typing import Any, List, Union

from ruamel.yaml import YAML, YAMLError
from ruamel.yaml.comments import CommentedMap

from kubebind.core.errors import ConversionError


class ManifestIO:
    """
    Reader/writer for manifest text. The same YAML instance is used in
    both directions so quoting and flow style round-trip.
    """

    def __init__(self):
        self.yaml = YAML(typ='rt')
        self.yaml.preserve_quotes = True
        # Standard K8s: 2 spaces, sequences indented 4 (offset 2)
        self.yaml.indent(mapping=2, sequence=4, offset=2)
        self.yaml.width = 4096

    def load_all(self, text: str) -> List[Any]:
        """Parses every document; empty documents are dropped."""
        # Remove Byte Order Mark if present
        text = text.lstrip('\ufeff')
        try:
            return [doc for doc in self.yaml.load_all(text) if doc is not None]
        except YAMLError as e:
            raise ConversionError(f"Manifest is not valid YAML: {e}") from e

    def dump_all(self, docs: Union[CommentedMap, List[Any]]) -> str:
        """Serializes documents, writing explicit separators between them."""
        stream = io.StringIO()
        docs = docs if isinstance(docs, list) else [docs]

        for i, doc in enumerate(docs):
            if i > 0:
                stream.write("---\n")
            self.yaml.dump(doc, stream)

        return stream.getvalue()
