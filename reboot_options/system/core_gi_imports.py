"""Imports GObject Introspection centralisés.

Objectif:
- Centraliser `gi.require_version(...)` au même endroit.
- Éviter les warnings pylint `wrong-import-position` dans les modules du core.

Seuls Gio (bus D-Bus) et GLib (boucle, timers, erreurs) sont nécessaires:
le core n'importe jamais de toolkit graphique.
"""

# isort: skip_file

from __future__ import annotations

import gi

# pylint: disable=wrong-import-position

gi.require_version("Gio", "2.0")
gi.require_version("GLib", "2.0")

from gi.repository import Gio, GLib  # noqa: E402

__all__ = ["Gio", "GLib"]
