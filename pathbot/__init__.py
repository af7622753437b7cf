"""pathbot: the "program the robot" grid puzzle service."""
