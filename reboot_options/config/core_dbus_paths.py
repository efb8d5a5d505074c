"""Adresses D-Bus des gestionnaires de connexion et de session.

Module séparé pour éviter les dépendances circulaires et clarifier les responsabilités.
"""

from __future__ import annotations

from typing import Final

# www.freedesktop.org/software/systemd/man/latest/org.freedesktop.login1.html
LOGIN1_BUS_NAME: Final[str] = "org.freedesktop.login1"
LOGIN1_OBJECT_PATH: Final[str] = "/org/freedesktop/login1"
LOGIN1_MANAGER_INTERFACE: Final[str] = "org.freedesktop.login1.Manager"

# Gestionnaire de session du bureau (flux de fin de session habituel).
SESSION_MANAGER_BUS_NAME: Final[str] = "org.gnome.SessionManager"
SESSION_MANAGER_OBJECT_PATH: Final[str] = "/org/gnome/SessionManager"
SESSION_MANAGER_INTERFACE: Final[str] = "org.gnome.SessionManager"

# Introspection minimale de login1: seuls les membres utilisés sont décrits.
LOGIN1_MANAGER_XML: Final[str] = """<node>
  <interface name="org.freedesktop.login1.Manager">
    <property name="BootLoaderEntries" type="as" access="read"/>
    <method name="CanRebootToFirmwareSetup">
      <arg type="s" direction="out" name="result"/>
    </method>
    <method name="SetRebootToFirmwareSetup">
      <arg type="b" direction="in" name="enable"/>
    </method>
    <method name="SetRebootToBootLoaderEntry">
      <arg type="s" direction="in" name="boot_loader_entry"/>
    </method>
    <method name="Reboot">
      <arg type="b" direction="in" name="interactive"/>
    </method>
  </interface>
</node>"""

# Timeout Gio par défaut (-1 = valeur par défaut du bus).
DEFAULT_IPC_TIMEOUT_MS: Final[int] = -1
