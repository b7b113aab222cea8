LOGO = r"""
       _            ___       _                 _
 _ __ (_)_ __   ___|_  )  ___| | ___  _   _  __| |
| '_ \| | '_ \ / _ \/ /  / __| |/ _ \| | | |/ _` |
| |_) | | |_) |  __/___| | (__| | (_) | |_| | (_| |
| .__/|_| .__/ \___|      \___|_|\___/ \__,_|\__,_|
|_|     |_|
"""

DEFAULT_OUTPUT_NAMES = {
    "cloudformation": "{name}.template.{fmt}",
    "diagram": "{name}.txt",
}
