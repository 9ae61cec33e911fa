"""Static HTML pages served to candidates.

Each page is a single document with inline style and script. The exam page
holds no authoritative state: it renders whatever the session snapshot says
and forwards candidate actions and integrity signals to the API.
"""

from __future__ import annotations

from exam_portal.constants.exam_constants import WINDOW_POLL_INTERVAL_MS
from exam_portal.core.markdown_renderer import MATHJAX_SCRIPT_URL

_BASE_STYLE = """
      :root { font-family: 'Inter', system-ui, sans-serif; background: #0b1120; color: #f5f7ff; }
      body { margin: 0; padding: 1.5rem; display: flex; flex-direction: column; gap: 1rem; }
      a { color: #5eead4; }
      .card { background: #111a30; border-radius: 0.75rem; padding: 1.5rem; box-shadow: 0 0.5rem 1.5rem rgba(0, 0, 0, 0.4); }
      .hidden { display: none !important; }
      .muted { color: #94a3b8; font-size: 0.95rem; }
      .error { color: #f87171; }
      .primary-button { border: none; border-radius: 0.75rem; padding: 0.85rem 1.5rem; font-size: 1rem; background: #1f9aa5; color: #fff; cursor: pointer; transition: transform 120ms ease, background 120ms ease; }
      .primary-button:hover { transform: translateY(-2px); background: #16808a; }
      .primary-button:disabled { opacity: 0.6; cursor: not-allowed; }
      .secondary-button { border: 1px solid #334155; border-radius: 0.75rem; padding: 0.85rem 1.5rem; font-size: 1rem; background: transparent; color: #f5f7ff; cursor: pointer; }
      input { border-radius: 0.5rem; border: 1px solid #334155; background: #0b1120; color: #f5f7ff; padding: 0.75rem; font-size: 1rem; }
"""

_MATHJAX_HEAD = """
    <script>
      window.MathJax = { tex: { inlineMath: [['$','$']], displayMath: [['$$','$$']] }, svg: { fontCache: 'global' } };
    </script>
    <script defer src="__MATHJAX_URL__"></script>
""".replace("__MATHJAX_URL__", MATHJAX_SCRIPT_URL)

_TYPESET_SCRIPT = """
      async function typesetMath(targets) {
        await new Promise(resolve => setTimeout(resolve, 100));
        for (let i = 0; i < 15; i++) {
          if (window.MathJax && window.MathJax.typesetPromise) {
            try {
              await window.MathJax.typesetPromise(targets);
              return;
            } catch (err) {
              console.warn('MathJax typeset attempt', i + 1, 'error:', err);
            }
          }
          await new Promise(resolve => setTimeout(resolve, 150));
        }
      }

      function escapeText(value) {
        const span = document.createElement('span');
        span.textContent = value == null ? '' : String(value);
        return span.innerHTML;
      }
"""


def _page(title: str, body: str, *, math: bool = False) -> str:
    head_extra = _MATHJAX_HEAD if math else ""
    return (
        "<!doctype html>\n"
        '<html lang="en">\n'
        "  <head>\n"
        '    <meta charset="utf-8" />\n'
        f"    <title>{title}</title>\n"
        '    <meta name="viewport" content="width=device-width, initial-scale=1" />\n'
        f"    <style>{_BASE_STYLE}__PAGE_STYLE__    </style>\n"
        f"{head_extra}"
        "  </head>\n"
        f"  <body>\n{body}\n  </body>\n"
        "</html>\n"
    )


HOME_PAGE_HTML = _page(
    "Exam Portal",
    """
    <section class="card">
      <h1>Exam Portal</h1>
      <p id="identity" class="muted">Checking sign-in…</p>
      <button id="logout-button" class="secondary-button hidden">Sign out</button>
    </section>
    <section class="card">
      <h2>Available tests</h2>
      <div id="subjects" class="subject-grid"></div>
      <p id="subjects-status" class="muted"></p>
    </section>
    <script>
      const identityEl = document.getElementById('identity');
      const logoutButton = document.getElementById('logout-button');
      const subjectsEl = document.getElementById('subjects');
      const subjectsStatus = document.getElementById('subjects-status');

      async function loadIdentity() {
        const response = await fetch('/api/identity');
        const payload = await response.json();
        if (payload.authenticated) {
          identityEl.textContent = `Signed in as ${payload.display_name} (${payload.email})`;
          logoutButton.classList.remove('hidden');
        } else {
          identityEl.innerHTML = 'You are not signed in. <a href="/login">Sign in</a> to take a test.';
        }
      }

      async function loadSubjects() {
        try {
          const response = await fetch('/api/subjects');
          const payload = await response.json();
          if (!response.ok) {
            subjectsStatus.textContent = payload.detail || 'Unable to load tests.';
            return;
          }
          subjectsEl.innerHTML = '';
          if (payload.subjects.length === 0) {
            subjectsStatus.textContent = 'No tests are available yet.';
            return;
          }
          payload.subjects.forEach(subject => {
            const link = document.createElement('a');
            link.className = 'subject-link';
            link.href = `/exam/${encodeURIComponent(subject.slug)}`;
            link.textContent = `${subject.name} (${subject.question_count} questions)`;
            subjectsEl.appendChild(link);
          });
        } catch (error) {
          subjectsStatus.textContent = 'Unable to reach the exam server.';
        }
      }

      logoutButton.addEventListener('click', async () => {
        await fetch('/api/logout', { method: 'POST' });
        window.location.reload();
      });

      loadIdentity();
      loadSubjects();
    </script>""",
).replace(
    "__PAGE_STYLE__",
    """
      .subject-grid { display: grid; grid-template-columns: repeat(auto-fit, minmax(220px, 1fr)); gap: 0.75rem; }
      .subject-link { display: block; background: #1f9aa5; color: #fff; text-decoration: none; border-radius: 0.75rem; padding: 1rem; }
""",
)


LOGIN_PAGE_HTML = _page(
    "Sign in · Exam Portal",
    """
    <section id="cheating-notice" class="card hidden">
      <h2 class="error">Cheating attempt detected</h2>
      <p>Your previous exam was terminated after repeated integrity violations. Nothing from that exam was saved.</p>
    </section>
    <section class="card">
      <h1>Sign in</h1>
      <form id="login-form" class="login-form">
        <input id="email" type="email" placeholder="Email address" required />
        <input id="display-name" type="text" placeholder="Display name (optional)" />
        <button class="primary-button" type="submit">Continue</button>
      </form>
      <p id="login-status" class="error"></p>
    </section>
    <script>
      const params = new URLSearchParams(window.location.search);
      if (params.get('cheating_attempt') === 'true') {
        document.getElementById('cheating-notice').classList.remove('hidden');
      }
      const nextUrl = params.get('next') && params.get('next').startsWith('/') ? params.get('next') : '/';
      const statusEl = document.getElementById('login-status');

      document.getElementById('login-form').addEventListener('submit', async event => {
        event.preventDefault();
        statusEl.textContent = '';
        try {
          const response = await fetch('/api/login', {
            method: 'POST',
            headers: { 'Content-Type': 'application/json' },
            body: JSON.stringify({
              email: document.getElementById('email').value,
              display_name: document.getElementById('display-name').value || null
            })
          });
          const body = await response.json().catch(() => ({}));
          if (!response.ok) {
            statusEl.textContent = typeof body.detail === 'string' ? body.detail : 'Unable to sign in.';
            return;
          }
          window.location.href = nextUrl;
        } catch (error) {
          statusEl.textContent = 'Unable to reach the exam server.';
        }
      });
    </script>""",
).replace(
    "__PAGE_STYLE__",
    """
      .login-form { display: flex; flex-direction: column; gap: 0.75rem; max-width: 24rem; }
""",
)


EXAM_PAGE_HTML = _page(
    "Exam · Exam Portal",
    """
    <section class="card header-bar">
      <div>
        <h1 id="subject-name">Loading exam…</h1>
        <p id="exam-meta" class="muted"></p>
      </div>
      <div class="clocks">
        <div>Time left: <strong id="exam-clock">--:--</strong></div>
        <div>This question: <strong id="question-clock">--</strong>s</div>
      </div>
    </section>
    <div id="notice" class="notice hidden"></div>
    <p id="load-error" class="error"></p>
    <div id="exam-body" class="exam-layout hidden">
      <section class="card">
        <div id="comprehension" class="comprehension hidden"></div>
        <h2 id="question-number"></h2>
        <div id="question-text"></div>
        <img id="question-image" class="question-image hidden" alt="" />
        <div id="options" class="options-list"></div>
        <div class="action-row">
          <button id="previous-button" class="secondary-button">Previous</button>
          <button id="review-button" class="secondary-button">Mark for review &amp; next</button>
          <button id="next-button" class="primary-button">Save &amp; next</button>
          <button id="submit-button" class="primary-button">Submit</button>
        </div>
        <p id="action-error" class="error"></p>
      </section>
      <section class="card">
        <h3>Questions</h3>
        <div id="palette" class="palette"></div>
        <ul class="legend muted">
          <li><span class="swatch not_visited"></span>Not visited</li>
          <li><span class="swatch not_answered"></span>Not answered</li>
          <li><span class="swatch answered"></span>Answered</li>
          <li><span class="swatch review"></span>Marked for review</li>
          <li><span class="swatch answered_and_review"></span>Answered &amp; marked</li>
        </ul>
      </section>
    </div>
    <div id="submit-modal" class="overlay hidden">
      <div class="card modal">
        <h2 id="submit-title">Submit exam?</h2>
        <p id="submit-summary"></p>
        <p id="submit-error" class="error"></p>
        <div class="action-row">
          <button id="submit-cancel" class="secondary-button">Cancel</button>
          <button id="submit-confirm" class="primary-button">Submit</button>
        </div>
      </div>
    </div>
    <div id="warning-modal" class="overlay hidden">
      <div class="card modal">
        <h2 id="warning-title" class="error"></h2>
        <p id="warning-message"></p>
        <button id="warning-dismiss" class="primary-button">I understand</button>
      </div>
    </div>
    <script>
      const WINDOW_POLL_INTERVAL_MS = __WINDOW_POLL_INTERVAL_MS__;
      const slug = decodeURIComponent(window.location.pathname.split('/').filter(Boolean).pop());
      const el = id => document.getElementById(id);

      let sessionId = null;
      let state = null;
      let renderedQuestionId = null;
      let pollHandle = null;
      let windowHandle = null;
      let redirecting = false;
      let leaving = false;

      __TYPESET_SCRIPT__

      function formatClock(seconds) {
        const minutes = Math.floor(seconds / 60);
        const rest = seconds % 60;
        return `${String(minutes).padStart(2, '0')}:${String(rest).padStart(2, '0')}`;
      }

      async function api(path, body) {
        const options = body === undefined ? {} : {
          method: 'POST',
          headers: { 'Content-Type': 'application/json' },
          body: JSON.stringify(body)
        };
        const response = await fetch(path, options);
        const payload = await response.json().catch(() => ({}));
        if (response.status === 401) {
          window.location.href = `/login?next=${encodeURIComponent(window.location.pathname)}`;
          throw new Error('not authenticated');
        }
        if (!response.ok) {
          const detail = typeof payload.detail === 'string' ? payload.detail : 'Request failed.';
          const error = new Error(detail);
          error.status = response.status;
          throw error;
        }
        return payload;
      }

      function sessionPath(action) {
        return `/api/sessions/${sessionId}${action ? '/' + action : ''}`;
      }

      function stopTimers() {
        if (pollHandle) { clearInterval(pollHandle); pollHandle = null; }
        if (windowHandle) { clearInterval(windowHandle); windowHandle = null; }
      }

      function renderQuestion(question) {
        if (question.id === renderedQuestionId) {
          return;
        }
        renderedQuestionId = question.id;
        el('question-number').textContent = `Question ${question.number} of ${state.question_count}`;
        el('question-text').innerHTML = question.html;
        if (question.comprehension_html) {
          el('comprehension').innerHTML = question.comprehension_html;
          el('comprehension').classList.remove('hidden');
        } else {
          el('comprehension').classList.add('hidden');
        }
        if (question.image_url) {
          el('question-image').src = question.image_url;
          el('question-image').classList.remove('hidden');
        } else {
          el('question-image').classList.add('hidden');
        }
        const optionsEl = el('options');
        optionsEl.innerHTML = '';
        question.options.forEach((option, index) => {
          const button = document.createElement('button');
          button.className = 'option-button';
          button.dataset.optionId = option.id;
          button.innerHTML = `<span class="option-letter">${String.fromCharCode(65 + index)}.</span> ${option.html}`;
          button.addEventListener('click', () => act('select', { option_id: option.id }));
          optionsEl.appendChild(button);
        });
        typesetMath([el('question-text'), optionsEl, el('comprehension')]);
      }

      function render(payload) {
        state = payload;
        const active = state.phase === 'active';
        el('subject-name').textContent = state.subject.name;
        if (state.meta) {
          el('exam-meta').textContent = `${state.question_count} questions · ${state.meta.total_marks} marks · ${formatClock(state.meta.total_time)} total`;
        }
        el('exam-clock').textContent = formatClock(state.remaining_seconds);
        el('question-clock').textContent = state.question_seconds_remaining;
        el('exam-body').classList.remove('hidden');

        const notice = el('notice');
        if (state.notice) {
          notice.textContent = state.notice;
          notice.classList.remove('hidden');
        } else {
          notice.classList.add('hidden');
        }

        if (state.question) {
          renderQuestion(state.question);
        }
        const selected = state.answers[String(state.current_index)];
        el('options').querySelectorAll('.option-button').forEach(button => {
          button.classList.toggle('selected', Number(button.dataset.optionId) === selected);
          button.disabled = !active;
        });
        el('previous-button').disabled = !active || state.current_index === 0;
        el('next-button').disabled = !active || state.is_last_question;
        el('review-button').disabled = !active;
        el('submit-button').disabled = !(active || state.phase === 'time_expired');

        const palette = el('palette');
        palette.innerHTML = '';
        state.statuses.forEach((status, index) => {
          const button = document.createElement('button');
          button.className = `palette-button ${status}` + (index === state.current_index ? ' current' : '');
          button.textContent = index + 1;
          button.disabled = !active;
          button.addEventListener('click', () => act('goto', { index }));
          palette.appendChild(button);
        });

        renderSubmitModal();
        renderWarning(state.integrity.warning);
        if (state.phase === 'terminated' || state.phase === 'submitted') {
          stopTimers();
        }
      }

      function renderSubmitModal() {
        const modal = el('submit-modal');
        if (!state.show_submit_modal) {
          modal.classList.add('hidden');
          return;
        }
        const expired = state.phase === 'time_expired';
        const answered = Object.keys(state.answers).length;
        el('submit-title').textContent = expired ? 'Time is up!' : 'Submit exam?';
        el('submit-summary').textContent = `You answered ${answered} of ${state.question_count} questions.`;
        el('submit-error').textContent = state.submit_error || '';
        el('submit-cancel').classList.toggle('hidden', expired);
        el('submit-confirm').disabled = state.is_submitting;
        el('submit-confirm').textContent = state.is_submitting ? 'Submitting…' : 'Submit';
        modal.classList.remove('hidden');
      }

      function renderWarning(warning) {
        const modal = el('warning-modal');
        if (!warning) {
          modal.classList.add('hidden');
          return;
        }
        el('warning-title').textContent = warning.title;
        el('warning-message').textContent = warning.message;
        el('warning-dismiss').classList.toggle('hidden', !warning.dismissible);
        modal.classList.remove('hidden');
        if (warning.final && warning.redirect_url && !redirecting) {
          redirecting = true;
          stopTimers();
          setTimeout(() => { window.location.href = warning.redirect_url; }, warning.redirect_after_ms || 0);
        }
      }

      async function act(action, body) {
        el('action-error').textContent = '';
        try {
          render(await api(sessionPath(action), body || {}));
        } catch (error) {
          el('action-error').textContent = error.message;
        }
      }

      async function refresh() {
        if (!sessionId) return;
        try {
          render(await api(sessionPath('')));
        } catch (error) {
          if (error.status === 404) {
            stopTimers();
            el('load-error').textContent = 'This exam session has ended.';
          }
        }
      }

      async function submitExam() {
        el('submit-confirm').disabled = true;
        try {
          const receipt = await api(sessionPath('submit'), {});
          leaving = true;
          stopTimers();
          window.location.href = receipt.redirect_url;
        } catch (error) {
          el('submit-error').textContent = error.message;
          el('submit-confirm').disabled = false;
        }
      }

      async function sampleWindow() {
        if (!sessionId || redirecting) return;
        try {
          const payload = await api(sessionPath('window'), {
            outer_width: window.outerWidth,
            inner_width: window.innerWidth,
            outer_height: window.outerHeight,
            inner_height: window.innerHeight
          });
          render(payload);
        } catch (error) {
          console.warn('Window sample failed:', error);
        }
      }

      document.addEventListener('visibilitychange', async () => {
        if (!sessionId || redirecting) return;
        try {
          render(await api(sessionPath('visibility'), { visible: document.visibilityState === 'visible' }));
        } catch (error) {
          console.warn('Visibility report failed:', error);
        }
      });

      window.addEventListener('beforeunload', () => {
        if (sessionId && !leaving) {
          navigator.sendBeacon(sessionPath('leave'));
        }
      });

      el('previous-button').addEventListener('click', () => act('previous'));
      el('next-button').addEventListener('click', () => act('next'));
      el('review-button').addEventListener('click', () => act('review'));
      el('submit-button').addEventListener('click', () => act('submit-modal', { open: true }));
      el('submit-cancel').addEventListener('click', () => act('submit-modal', { open: false }));
      el('submit-confirm').addEventListener('click', submitExam);
      el('warning-dismiss').addEventListener('click', () => act('warning/dismiss'));

      async function startExam() {
        try {
          const payload = await api(`/api/exams/${encodeURIComponent(slug)}/start`, {});
          sessionId = payload.session_id;
          render(payload);
          pollHandle = setInterval(refresh, 1000);
          windowHandle = setInterval(sampleWindow, WINDOW_POLL_INTERVAL_MS);
        } catch (error) {
          el('subject-name').textContent = 'Exam unavailable';
          el('load-error').innerHTML = `${escapeText(error.message)} <a href="/">Back to tests</a>`;
        }
      }

      startExam();
    </script>""",
    math=True,
).replace(
    "__PAGE_STYLE__",
    """
      .header-bar { display: flex; justify-content: space-between; align-items: center; gap: 1rem; flex-wrap: wrap; }
      .clocks { display: flex; flex-direction: column; gap: 0.35rem; color: #facc15; }
      .notice { background: #facc15; color: #0b1120; border-radius: 0.75rem; padding: 0.75rem 1rem; font-weight: 600; }
      .exam-layout { display: grid; grid-template-columns: minmax(0, 3fr) minmax(220px, 1fr); gap: 1rem; }
      .comprehension { border-left: 4px solid #1f9aa5; padding-left: 1rem; margin-bottom: 1rem; color: #cbd5f5; }
      .question-image { max-width: 100%; border-radius: 0.5rem; margin: 0.75rem 0; }
      .options-list { display: flex; flex-direction: column; gap: 0.6rem; margin: 1rem 0; }
      .option-button { text-align: left; border: 1px solid #334155; border-radius: 0.75rem; padding: 0.9rem 1rem; font-size: 1rem; background: #0b1120; color: #f5f7ff; cursor: pointer; }
      .option-button.selected { background: #1f9aa5; border-color: #1f9aa5; }
      .option-button:disabled { opacity: 0.6; cursor: not-allowed; }
      .option-button p { display: inline; margin: 0; }
      .action-row { display: flex; gap: 0.75rem; flex-wrap: wrap; }
      .palette { display: grid; grid-template-columns: repeat(auto-fill, minmax(2.75rem, 1fr)); gap: 0.5rem; }
      .palette-button { border: none; border-radius: 0.5rem; padding: 0.6rem 0; color: #fff; cursor: pointer; font-weight: 600; }
      .palette-button.current { outline: 3px solid #facc15; }
      .not_visited { background: #475569; }
      .not_answered { background: #dc2626; }
      .answered { background: #16a34a; }
      .review { background: #7c3aed; }
      .answered_and_review { background: linear-gradient(135deg, #7c3aed 50%, #16a34a 50%); }
      .legend { list-style: none; padding: 0; display: flex; flex-direction: column; gap: 0.35rem; }
      .swatch { display: inline-block; width: 0.9rem; height: 0.9rem; border-radius: 0.25rem; margin-right: 0.5rem; vertical-align: middle; }
      .overlay { position: fixed; inset: 0; background: rgba(2, 6, 23, 0.8); display: flex; align-items: center; justify-content: center; padding: 1rem; }
      .modal { max-width: 28rem; width: 100%; }
""",
).replace(
    "__TYPESET_SCRIPT__", _TYPESET_SCRIPT
).replace(
    "__WINDOW_POLL_INTERVAL_MS__", str(WINDOW_POLL_INTERVAL_MS)
)


RESULT_PAGE_HTML = _page(
    "Result · Exam Portal",
    """
    <section class="card">
      <h1 id="result-title">Loading result…</h1>
      <p id="result-error" class="error"></p>
      <div id="summary" class="summary hidden">
        <div><strong id="score-percent"></strong><span class="muted"> score</span></div>
        <div><strong id="correct-count"></strong><span class="muted"> correct</span></div>
        <div><strong id="wrong-count"></strong><span class="muted"> wrong</span></div>
        <div><strong id="not-attended-count"></strong><span class="muted"> not attended</span></div>
      </div>
      <p><a href="/">Back to tests</a></p>
    </section>
    <div id="questions" class="result-list"></div>
    <script>
      __TYPESET_SCRIPT__

      const STATUS_LABELS = { correct: 'Correct', wrong: 'Wrong', not_attended: 'Not attended' };

      function renderQuestion(question) {
        const card = document.createElement('section');
        card.className = `card result-card ${question.status}`;
        const comprehension = question.comprehension_html
          ? `<div class="comprehension">${question.comprehension_html}</div>` : '';
        const image = question.image_url
          ? `<img class="question-image" src="${escapeText(question.image_url)}" alt="" />` : '';
        const options = question.options.map(option => {
          const classes = ['result-option'];
          if (option.id === question.correct_option_id) classes.push('correct-option');
          if (option.id === question.selected_option_id && option.id !== question.correct_option_id) classes.push('wrong-option');
          return `<li class="${classes.join(' ')}">${option.html}</li>`;
        }).join('');
        card.innerHTML = `
          ${comprehension}
          <h3>Question ${question.number} · <span class="status-label">${STATUS_LABELS[question.status]}</span></h3>
          <div>${question.html}</div>
          ${image}
          <ul class="result-options">${options}</ul>`;
        return card;
      }

      async function loadResult() {
        const attemptId = new URLSearchParams(window.location.search).get('attempt_id');
        if (!attemptId) {
          document.getElementById('result-title').textContent = 'Result unavailable';
          document.getElementById('result-error').textContent = 'No attempt was given.';
          return;
        }
        try {
          const response = await fetch(`/api/results/${encodeURIComponent(attemptId)}`);
          const payload = await response.json().catch(() => ({}));
          if (response.status === 401) {
            window.location.href = `/login?next=${encodeURIComponent(window.location.pathname + window.location.search)}`;
            return;
          }
          if (!response.ok) {
            document.getElementById('result-title').textContent = 'Result unavailable';
            document.getElementById('result-error').textContent = payload.detail || 'Failed to load result';
            return;
          }
          const attempt = payload.attempt;
          document.getElementById('result-title').textContent = `Result · ${attempt.subject}`;
          document.getElementById('score-percent').textContent = `${payload.score_percent}%`;
          document.getElementById('correct-count').textContent = attempt.correct;
          document.getElementById('wrong-count').textContent = attempt.wrong;
          document.getElementById('not-attended-count').textContent = attempt.not_attended;
          document.getElementById('summary').classList.remove('hidden');
          const list = document.getElementById('questions');
          payload.questions.forEach(question => list.appendChild(renderQuestion(question)));
          typesetMath([list]);
        } catch (error) {
          document.getElementById('result-error').textContent = 'Unable to reach the exam server.';
        }
      }

      loadResult();
    </script>""",
    math=True,
).replace(
    "__PAGE_STYLE__",
    """
      .summary { display: flex; gap: 1.5rem; flex-wrap: wrap; font-size: 1.2rem; }
      .result-list { display: flex; flex-direction: column; gap: 1rem; }
      .result-card.correct { border-left: 6px solid #16a34a; }
      .result-card.wrong { border-left: 6px solid #dc2626; }
      .result-card.not_attended { border-left: 6px solid #475569; }
      .comprehension { border-left: 4px solid #1f9aa5; padding-left: 1rem; color: #cbd5f5; }
      .question-image { max-width: 100%; border-radius: 0.5rem; }
      .result-options { list-style: upper-alpha; display: flex; flex-direction: column; gap: 0.4rem; }
      .result-option p { display: inline; margin: 0; }
      .correct-option { color: #4ade80; font-weight: 600; }
      .wrong-option { color: #f87171; text-decoration: line-through; }
""",
).replace(
    "__TYPESET_SCRIPT__", _TYPESET_SCRIPT
)
