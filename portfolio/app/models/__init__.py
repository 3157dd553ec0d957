from portfolio.app.models.profile import Profile
