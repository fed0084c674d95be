"""
The MODEL layer contains pure data structures: the half-edge entities, the
Mesh container, its errors and file I/O.
It has NO knowledge of subdivision or of the visualization (PyVista) beyond
exporting files.
"""
