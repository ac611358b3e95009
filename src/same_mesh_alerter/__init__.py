"""
SAME Mesh Alerter - relay SAME/EAS emergency alerts onto a Meshtastic mesh.
"""

__version__ = "0.1.0"
