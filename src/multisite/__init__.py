"""
Multisite phosphorylation classifier simulator.

Models a protein with n phosphosites that is classified "active" once at
least k sites are phosphorylated, and measures how well that threshold rule
separates true signals from spurious (noise) phosphorylation across noise
levels via ROC curves and their AUC.
"""
