"""
Math helpers and a reference rigid body / collision world.
"""
