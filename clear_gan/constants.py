# Shared by BinaryCrossEntropy clipping and the Adam denominator.
EPSILON = 1e-7
