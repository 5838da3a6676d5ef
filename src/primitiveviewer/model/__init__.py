"""
The MODEL layer contains pure data structures and business logic.
It has NO knowledge of the GUI (Qt). It turns primitive records into
positioned PyVista geometry and frames the camera around it.
"""
