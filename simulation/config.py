# simulation/config.py
"""
Configuration constants for the simulation domain.
Includes droplet erosion and sediment tuning values.
"""
from __future__ import annotations

# =============================================================================
# EROSION & SEDIMENT
# =============================================================================
EROSION_RADIUS = 3                  # Brush radius in mesh hops (1 = the vertex only)
INERTIA = 0.05                      # 0 = instantly turn downhill, 1 = never turn
SEDIMENT_CAPACITY_FACTOR = 4.0      # Multiplier for how much sediment a droplet can carry
MIN_SEDIMENT_CAPACITY = 0.01        # Keeps capacity above zero on flat terrain
ERODE_SPEED = 0.3                   # Fraction of free capacity picked up per step
DEPOSIT_SPEED = 0.03                # Fraction of excess sediment dropped per step
EVAPORATE_SPEED = 0.01              # Fraction of water lost per step
GRAVITY = 4.0
MAX_DROPLET_LIFETIME = 30           # Steps before a droplet is discarded
INITIAL_WATER_VOLUME = 1.0
INITIAL_SPEED = 1.0

# Droplets per iteration when clouds are not simulated
WEATHERLESS_DROPLETS = 5

