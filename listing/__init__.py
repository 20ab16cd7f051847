"""List screens: query model, transitions and the screen controller."""
