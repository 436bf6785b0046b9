# Standard collaborators of the Glossa interpreter.
