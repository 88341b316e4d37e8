"""
Testplate analysis: derive actual surface radius and sag from testplate fringe
measurements, and import surface prescriptions from lens description files.
"""
