"""Sample reviews used to pre-fill the dashboard input."""

SAMPLE_REVIEWS = """
Oct 1: "The new update is fantastic! The UI is much cleaner."
Oct 2: "I'm having trouble logging in since the patch. Support is unresponsive."
Oct 3: "Love the speed improvements, but the dark mode contrast is off."
Oct 4: "Terrible experience. The app crashes every time I open the settings."
Oct 5: "Great customer service! Jane helped me resolve my billing issue immediately."
Oct 6: "The product is good, but the shipping was delayed by a week."
Oct 7: "Absolutely love it. Best investment for my workflow this year."
Oct 8: "Why did you remove the export feature? This is a dealbreaker."
Oct 9: "Smooth experience overall, but I wish there were more tutorials."
Oct 10: "Can't recommend enough. The team really listens to feedback."
""".strip()
