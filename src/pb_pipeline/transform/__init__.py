"""
Race → personal-bests transformation stages.
"""
