"""
Rotor physics models.

Contains the atmosphere model, the blade-element solver, the rotor sub-models
(flapping, inflow, ground and wall proximity, tip vortex, prop wash,
turbulence, motor) and the per-tick orchestrator that composes them.
"""
