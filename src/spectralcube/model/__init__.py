"""
The MODEL layer contains pure data structures and validation.
It has NO knowledge of the engine; energy is derived by spectralcube.engine.
"""
