"""
Entry point for the SEO Blog Engine.
Delegates to blog_engine.main.
"""
import sys
import os

# Add the current directory to python path
sys.path.append(os.getcwd())

from blog_engine.main import main

if __name__ == "__main__":
    main()
