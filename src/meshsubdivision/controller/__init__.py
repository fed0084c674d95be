"""
The CONTROLLER layer holds the algorithms that create meshes: construction of
half-edge connectivity from indexed polygons, the subdivision schemes and the
level cache that drives them.

Note: This package should be pure Python/NumPy and should NOT import pyvista.
"""
