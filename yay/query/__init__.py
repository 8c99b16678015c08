"""AUR and repository searches, result ranking, AUR warnings and version comparison."""