"""Single-page survey UI."""

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

router = APIRouter(tags=["page"])


@router.get("/", response_class=HTMLResponse)
async def survey_page() -> HTMLResponse:
    """Survey page; all state lives behind the JSON API."""
    return HTMLResponse(SURVEY_PAGE_HTML)


@router.get("/reset", response_class=HTMLResponse)
async def reset_page() -> HTMLResponse:
    """Landing page for password recovery links."""
    return HTMLResponse(SURVEY_PAGE_HTML)


SURVEY_PAGE_HTML = """<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>Verifying Art</title>
    <style>
      body { font-family: system-ui, sans-serif; max-width: 900px; margin: 40px auto; padding: 0 1rem; }
      .grid { display: grid; gap: 12px; max-width: 520px; }
      .dims { display: grid; gap: 16px; grid-template-columns: repeat(auto-fit, minmax(320px, 1fr)); }
      .card { border: 1px solid #ddd; border-radius: 12px; padding: 16px; margin-bottom: 16px; }
      .error { border: 1px solid #f2a2a2; padding: 12px; border-radius: 8px; color: #a11; margin-bottom: 12px; }
      .notice { opacity: 0.85; margin-bottom: 12px; }
      .hint { font-size: 13px; opacity: 0.7; margin-top: 10px; }
      img { max-width: 100%; max-height: 70vh; display: block; margin: 0 auto; }
      input, textarea, button { padding: 10px 12px; font-size: 16px; }
      textarea { width: 100%; box-sizing: border-box; }
      .hidden { display: none; }
    </style>
  </head>
  <body>
    <header style="display:flex; justify-content:space-between; align-items:baseline">
      <h1>Verifying Art</h1>
      <button id="sign-out" class="hidden" onclick="call('/api/auth/sign-out')">Sign out</button>
    </header>
    <div id="error" class="error hidden"></div>
    <div id="notice" class="notice hidden"></div>

    <section id="signed_out" class="grid hidden">
      <input id="email" placeholder="email" autocomplete="email" />
      <input id="password" placeholder="password" type="password" autocomplete="current-password" />
      <div style="display:flex; gap:16px">
        <button onclick="credentials('/api/auth/sign-in')">Sign in</button>
        <button onclick="credentials('/api/auth/sign-up')">Sign up</button>
        <button onclick="call('/api/auth/forgot', {email: val('email')})">Forgot password</button>
      </div>
    </section>

    <section id="password_reset_pending" class="grid hidden">
      <h2>Reset password</h2>
      <div id="reset-form" class="grid">
        <input id="password1" type="password" placeholder="New password" autocomplete="new-password" />
        <input id="password2" type="password" placeholder="Confirm new password" autocomplete="new-password" />
        <button onclick="call('/api/auth/password', {password: val('password1'), confirmation: val('password2')})">Update password</button>
      </div>
      <button onclick="call('/api/auth/reset/cancel')">Back to sign in</button>
    </section>

    <section id="exhausted" class="hidden">
      <p>No more photos available right now.</p>
      <button onclick="call('/api/photos/next')">Check again</button>
    </section>

    <section id="rating" class="hidden">
      <div class="card"><img id="photo" alt="" /></div>
      <div class="dims" id="dims"></div>
      <div style="height:22px"></div>
      <button id="submit" onclick="call('/api/ratings/submit')">Save &amp; Next</button>
      <div id="missing" class="hint"></div>
    </section>

    <section id="no-photo" class="hidden">
      <button onclick="call('/api/photos/next')">Try again</button>
    </section>

    <script>
      let view = null;
      const val = (id) => document.getElementById(id).value;
      const show = (id, on) => document.getElementById(id).classList.toggle('hidden', !on);

      async function call(path, body) {
        const res = await fetch(path, {
          method: 'POST',
          headers: { 'Content-Type': 'application/json' },
          body: JSON.stringify(body || {})
        });
        const data = await res.json();
        if (!res.ok) {
          const session = await fetch('/api/session');
          render(await session.json());
          showMessage('error', data.detail);
          return;
        }
        render(data);
      }

      function credentials(path) {
        call(path, { email: val('email'), password: val('password') });
      }

      function showMessage(id, text) {
        const el = document.getElementById(id);
        el.textContent = text || '';
        show(id, Boolean(text));
      }

      function renderDimension(name, dim) {
        const score = dim.score === null ? '' : dim.score;
        const needsWhy = dim.score !== null && dim.score !== dim.neutral_default;
        return `<div class="card">
          <h3>${dim.label}: <span>${score === '' ? 'not chosen' : score}</span></h3>
          <input type="range" min="0" max="10" step="1" value="${score === '' ? dim.neutral_default : score}"
            onchange="call('/api/ratings/score', {dimension: '${name}', value: Number(this.value)})" />
          <div class="hint">Neutral: ${dim.neutral_default}</div>
          <textarea rows="3" class="${needsWhy ? '' : 'hidden'}" placeholder="Why?"
            onchange="call('/api/ratings/rationale', {dimension: '${name}', text: this.value})"></textarea>
        </div>`;
      }

      function render(data) {
        view = data;
        showMessage('error', data.error);
        showMessage('notice', data.notice);
        show('sign-out', data.state !== 'signed_out');
        show('signed_out', data.state === 'signed_out');
        show('password_reset_pending', data.state === 'password_reset_pending');
        show('reset-form', data.reset_ready);
        show('exhausted', data.state === 'exhausted');
        show('rating', Boolean(data.photo));
        show('no-photo', data.state === 'awaiting_rating' && !data.photo);
        if (data.photo) {
          const img = document.getElementById('photo');
          if (img.dataset.id !== data.photo.id) {
            img.src = data.photo.url;
            img.alt = data.photo.storage_path;
            img.dataset.id = data.photo.id;
            document.getElementById('dims').innerHTML = Object.entries(data.draft)
              .map(([name, dim]) => renderDimension(name, dim)).join('');
          } else {
            const cards = document.getElementById('dims').children;
            Object.entries(data.draft).forEach(([name, dim], i) => {
              const needsWhy = dim.score !== null && dim.score !== dim.neutral_default;
              cards[i].querySelector('span').textContent = dim.score === null ? 'not chosen' : dim.score;
              cards[i].querySelector('textarea').classList.toggle('hidden', !needsWhy);
            });
          }
          document.getElementById('submit').disabled = !data.can_submit || data.busy;
          document.getElementById('missing').textContent = data.missing.join(' ');
        }
      }

      call('/api/session/start', { url: window.location.href }).then(() => {
        if (window.location.hash) {
          history.replaceState(null, '', window.location.pathname);
        }
      });
    </script>
  </body>
</html>
"""
