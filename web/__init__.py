"""
Web front end of the simulator
"""
