"""
The VIEW layer turns render attributes into PyVista / Matplotlib objects.
It only reads meshes; nothing in here feeds back into the model.
"""
