"""
simone-prompts

Render Simone prompts for a project
"""
from simone_prompts.simone_prompts import main


if __name__ == "__main__":
    main()
